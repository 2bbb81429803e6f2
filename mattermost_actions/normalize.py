"""Map Mattermost payloads to the host's field names.

`user_id` becomes `userId`, `create_at` becomes `createdAt`, `emoji_name`
becomes `emoji`. Empty `root_id` and `file_ids` are dropped instead of being
emitted as falsy values.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Sequence, TypeVar

from mattermost_actions.types import (
    NormalizedMessage,
    NormalizedPin,
    NormalizedReaction,
    RemotePost,
    RemotePostList,
    RemoteReaction,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


def normalize_reaction(reaction: RemoteReaction) -> NormalizedReaction:
    return NormalizedReaction(
        user_id=reaction.user_id,
        emoji=reaction.emoji_name,
        created_at=reaction.create_at,
    )


def normalize_reactions(reactions: Sequence[RemoteReaction]) -> List[NormalizedReaction]:
    return [normalize_reaction(r) for r in reactions]


def normalize_message(post: RemotePost) -> NormalizedMessage:
    return NormalizedMessage(
        id=post.id,
        user_id=post.user_id,
        message=post.message,
        created_at=post.create_at,
        root_id=post.root_id or None,
        file_ids=list(post.file_ids) if post.file_ids else None,
    )


def normalize_pin(post: RemotePost) -> NormalizedPin:
    return NormalizedPin(
        id=post.id,
        user_id=post.user_id,
        message=post.message,
        created_at=post.create_at,
    )


def normalize_post_list(
    post_list: RemotePostList, normalizer: Callable[[RemotePost], T]
) -> List[T]:
    """Apply `normalizer` to each post in server order.

    Iterates `order`, never the `posts` mapping. Ids listed in `order` but
    absent from `posts` are skipped.
    """
    items: List[T] = []
    for post_id in post_list.order:
        post = post_list.posts.get(post_id)
        if post is None:
            logger.debug("Post %s listed in order but missing from posts", post_id)
            continue
        items.append(normalizer(post))
    return items
