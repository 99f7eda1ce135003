"""Feed 订阅 API."""

from fastapi import APIRouter, Depends, HTTPException, Response, status

from rssnotifier.context import AppContext, get_context
from rssnotifier.models.feed import FeedCreate, FeedSubscription

router = APIRouter(prefix="/api/feeds", tags=["feeds"])


@router.get("")
async def list_feeds(
    ctx: AppContext = Depends(get_context),
) -> list[FeedSubscription]:
    """获取订阅列表（按 id 排序）."""
    return await ctx.store.list_subscriptions()


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_feed(
    payload: FeedCreate,
    ctx: AppContext = Depends(get_context),
) -> FeedSubscription:
    """新增订阅."""
    return await ctx.store.create_feed(payload)


@router.get("/{feed_id}")
async def get_feed(
    feed_id: int,
    ctx: AppContext = Depends(get_context),
) -> FeedSubscription:
    """获取订阅详情."""
    feed = await ctx.store.get_subscription(feed_id)
    if not feed:
        raise HTTPException(status_code=404, detail="Feed 不存在")
    return feed


@router.put("/{feed_id}")
async def modify_feed(
    feed_id: int,
    payload: FeedCreate,
    ctx: AppContext = Depends(get_context),
) -> FeedSubscription:
    """修改订阅名称和 URL."""
    feed = await ctx.store.modify_feed(feed_id, payload)
    if not feed:
        raise HTTPException(status_code=404, detail="Feed 不存在")
    return feed


@router.delete("/{feed_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_feed(
    feed_id: int,
    ctx: AppContext = Depends(get_context),
) -> Response:
    """删除订阅."""
    if not await ctx.store.delete_feed(feed_id):
        raise HTTPException(status_code=404, detail="Feed 不存在")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{feed_id}/forcesend")
async def force_send_feed(
    feed_id: int,
    ctx: AppContext = Depends(get_context),
) -> dict:
    """立即检查订阅（后台执行，不等待结果）."""
    feed = await ctx.store.get_subscription(feed_id)
    if not feed:
        raise HTTPException(status_code=404, detail="Feed 不存在")

    ctx.pool.submit(feed)
    return {"id": feed_id, "status": "queued"}
