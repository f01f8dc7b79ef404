from http import HTTPStatus

from bson import ObjectId
from fastapi import APIRouter, Depends

from engagement_api.dependencies import (current_actor, get_tweets_service,
                                         page_spec)
from engagement_api.models.common import ApiResponse, Page, ok
from engagement_api.models.tweets import TweetView, TweetWriteRequest
from engagement_api.services.query_engine import PageSpec
from engagement_api.services.tweets_service import TweetsService

router = APIRouter(prefix="/api/v1/tweets", tags=["tweets"])


@router.post(
    "",
    response_model=ApiResponse[TweetView],
    status_code=HTTPStatus.CREATED)
async def create_tweet(
    body: TweetWriteRequest,
    actor: ObjectId = Depends(current_actor),
    svc: TweetsService = Depends(get_tweets_service),
):
    tweet = await svc.create_tweet(actor, body.content)
    return ok(tweet, "Tweet created", HTTPStatus.CREATED)


@router.get(
    "/users/{owner_id}",
    response_model=ApiResponse[Page[TweetView]],
    status_code=HTTPStatus.OK)
async def list_tweets(
    owner_id: str,
    spec: PageSpec = Depends(page_spec),
    svc: TweetsService = Depends(get_tweets_service),
):
    page = await svc.list_tweets(owner_id, spec)
    return ok(page, "Tweets fetched")


@router.patch(
    "/{tweet_id}",
    response_model=ApiResponse[TweetView],
    status_code=HTTPStatus.OK)
async def update_tweet(
    tweet_id: str,
    body: TweetWriteRequest,
    actor: ObjectId = Depends(current_actor),
    svc: TweetsService = Depends(get_tweets_service),
):
    tweet = await svc.update_tweet(actor, tweet_id, body.content)
    return ok(tweet, "Tweet updated")


@router.delete(
    "/{tweet_id}",
    response_model=ApiResponse[None],
    status_code=HTTPStatus.OK)
async def delete_tweet(
    tweet_id: str,
    actor: ObjectId = Depends(current_actor),
    svc: TweetsService = Depends(get_tweets_service),
):
    await svc.delete_tweet(actor, tweet_id)
    return ok(None, "Tweet deleted")
