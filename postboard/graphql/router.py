"""
Postboard Backend — GraphQL Endpoint
======================================

What:  Mounts the schema at /graphql and formats errors.
How:   strawberry's FastAPI router; process_result() rewrites each error so it
       carries the HTTP-style code of the domain error that caused it.

Error format:
    {
        "message": "Invalid input.",
        "code": 422,
        "locations": [{"line": 2, "column": 3}],
        "path": ["createPost"],
        "extensions": {"code": 422},
        "data": [{"message": "Title is invalid."}]
    }

    - domain errors: their own message and status code
    - malformed requests (syntax, unknown fields, bad variables): code 400
    - anything else: code 500 with a generic message; details go to the log
"""

from typing import Any, Dict

from graphql import GraphQLError
from starlette.requests import Request
from strawberry.fastapi import GraphQLRouter
from strawberry.http import GraphQLHTTPResponse
from strawberry.types import ExecutionResult

from postboard.config import settings
from postboard.exceptions import PostboardError, ValidationError
from postboard.graphql.context import get_context
from postboard.graphql.schema import schema

INTERNAL_ERROR_MESSAGE = "An unexpected error occurred. Please try again or contact support."


def format_error(error: GraphQLError) -> Dict[str, Any]:
    original = error.original_error
    formatted: Dict[str, Any] = dict(error.formatted)

    if isinstance(original, PostboardError):
        code = original.status_code
        formatted["message"] = original.message
    elif original is None:
        code = 400
    else:
        code = 500
        formatted["message"] = INTERNAL_ERROR_MESSAGE

    formatted["code"] = code
    formatted["extensions"] = {**(formatted.get("extensions") or {}), "code": code}
    if isinstance(original, ValidationError):
        formatted["data"] = original.data
    return formatted


class PostboardGraphQLRouter(GraphQLRouter):
    async def process_result(
        self, request: Request, result: ExecutionResult
    ) -> GraphQLHTTPResponse:
        response: GraphQLHTTPResponse = {"data": result.data}
        if result.errors:
            response["errors"] = [format_error(error) for error in result.errors]
        if result.extensions:
            response["extensions"] = result.extensions
        return response


def create_graphql_router() -> PostboardGraphQLRouter:
    return PostboardGraphQLRouter(
        schema,
        context_getter=get_context,
        graphql_ide="graphiql" if settings.graphiql else None,
    )
