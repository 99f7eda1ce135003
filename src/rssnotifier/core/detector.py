"""变更检测."""

from datetime import UTC, datetime


def _as_utc(value: datetime) -> datetime:
    # 无时区信息的时间按 UTC 处理
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def is_changed(stored: datetime | None, fetched: datetime) -> bool:
    """
    判断最新条目是否需要通知.

    仅当检查点存在且与新条目的发布时间为同一时刻时返回 False。
    只比较相等而不比较先后：检查点比新条目更晚（条目被撤回后重新发布旧条目）
    同样视为变更。

    Args:
        stored: 已保存的检查点
        fetched: 最新条目的发布时间

    Returns:
        True 表示需要发送通知
    """
    if stored is None:
        return True
    return _as_utc(stored) != _as_utc(fetched)
