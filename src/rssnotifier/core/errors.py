"""订阅检查过程中的错误类型."""


class FeedCheckError(Exception):
    """单次订阅检查失败的基类."""


class FeedFetchError(FeedCheckError):
    """Feed 下载失败（网络错误或非 2xx 响应）."""


class FetchTimeoutError(FeedFetchError):
    """Feed 下载超时."""


class FeedParseError(FeedCheckError):
    """Feed 文档无法解析，或发布时间不是合法的 RFC 2822 格式."""


class EmptyFeedError(FeedCheckError):
    """Feed 中没有任何条目."""


class MissingFieldError(FeedCheckError):
    """最新条目缺少必需字段（发布时间、链接或标题）."""


class NotificationError(FeedCheckError):
    """邮件通知发送失败."""


class NotifierConnectError(NotificationError):
    """无法连接到邮件中继."""


class NotifierSendError(NotificationError):
    """邮件中继认证或投递失败."""


class RelayTimeoutError(NotificationError):
    """邮件中继操作超时."""


class PersistenceError(FeedCheckError):
    """读写订阅存储失败."""
