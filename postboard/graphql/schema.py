"""
Postboard Backend — GraphQL Schema & Resolvers
================================================

What:  RootQuery / RootMutation resolvers binding the services to GraphQL.
How:   Each resolver decides for itself whether it needs a caller
       (info.context.require_identity()); createUser and login are the only
       anonymous operations. Services raise domain errors, which the router
       formats with their HTTP-style code. Each mutation commits its own
       writes before returning, so a failed commit is reported on that field.

Schema:
    type RootQuery {
        posts(page: Int!): [Post!]!
        totalPostCount: Int!
        post(id: ID!): Post!
    }
    type RootMutation {
        createUser(userInput: UserInputData!): User!
        login(email: String!, password: String!): AuthData!
        createPost(postInput: PostInputData!): Post!
        updatePost(id: ID!, postInput: PostInputData!): Post!
        deletePost(id: ID!): Boolean!
    }
"""

import logging
from typing import List, Optional

import strawberry
from graphql import GraphQLError
from strawberry.types import ExecutionContext, Info

from postboard.exceptions import PostboardError
from postboard.graphql.context import GraphQLContext
from postboard.graphql.types import AuthDataType, PostInput, PostType, UserInput, UserType
from postboard.services.post_service import GRAPHQL_PAGE_SIZE, post_service
from postboard.services.user_service import user_service

logger = logging.getLogger(__name__)

ContextInfo = Info[GraphQLContext, None]


@strawberry.type(name="RootQuery")
class Query:
    @strawberry.field
    async def posts(self, info: ContextInfo, page: int) -> List[PostType]:
        info.context.require_identity()
        async with info.context.session() as db:
            posts, _ = await post_service.list_posts(db, page, GRAPHQL_PAGE_SIZE)
        return [PostType.from_model(post) for post in posts]

    @strawberry.field
    async def total_post_count(self, info: ContextInfo) -> int:
        info.context.require_identity()
        async with info.context.session() as db:
            return await post_service.count_posts(db)

    @strawberry.field
    async def post(self, info: ContextInfo, id: strawberry.ID) -> PostType:
        info.context.require_identity()
        async with info.context.session() as db:
            post = await post_service.get_post(db, str(id))
        return PostType.from_model(post)


@strawberry.type(name="RootMutation")
class Mutation:
    @strawberry.mutation
    async def create_user(self, info: ContextInfo, user_input: UserInput) -> UserType:
        async with info.context.session(commit=True) as db:
            user = await user_service.create_user(
                db,
                email=user_input.email,
                name=user_input.name,
                password=user_input.password,
            )
        return UserType.from_model(user)

    @strawberry.mutation
    async def login(self, info: ContextInfo, email: str, password: str) -> AuthDataType:
        async with info.context.session() as db:
            auth = await user_service.login(db, email, password)
        return AuthDataType.from_model(auth)

    @strawberry.mutation
    async def create_post(self, info: ContextInfo, post_input: PostInput) -> PostType:
        identity = info.context.require_identity()
        async with info.context.session(commit=True) as db:
            post = await post_service.create_post(
                db,
                identity,
                title=post_input.title,
                content=post_input.content,
                image_url=post_input.image_url,
            )
        return PostType.from_model(post)

    @strawberry.mutation
    async def update_post(
        self, info: ContextInfo, id: strawberry.ID, post_input: PostInput
    ) -> PostType:
        identity = info.context.require_identity()
        async with info.context.session(commit=True) as db:
            post = await post_service.update_post(
                db,
                str(id),
                identity,
                title=post_input.title,
                content=post_input.content,
                image_url=post_input.image_url,
            )
        return PostType.from_model(post)

    @strawberry.mutation
    async def delete_post(self, info: ContextInfo, id: strawberry.ID) -> bool:
        identity = info.context.require_identity()
        async with info.context.session(commit=True) as db:
            return await post_service.delete_post(db, str(id), identity)


class PostboardSchema(strawberry.Schema):
    """Logs client-caused errors at WARNING and everything else with a traceback."""

    def process_errors(
        self,
        errors: List[GraphQLError],
        execution_context: Optional[ExecutionContext] = None,
    ) -> None:
        for error in errors:
            original = error.original_error
            if isinstance(original, PostboardError) and original.status_code < 500:
                logger.warning(
                    "GraphQL %s at %s: %s",
                    type(original).__name__,
                    error.path,
                    original.message,
                )
            elif original is None:
                logger.warning("GraphQL request error: %s", error.message)
            else:
                logger.error(
                    "GraphQL resolver failed at %s: %s",
                    error.path,
                    str(original),
                    exc_info=original,
                )


schema = PostboardSchema(query=Query, mutation=Mutation)
