# Routes package init
"""
Postboard Backend — REST Routes Package
=========================================

Route Inventory:
    - images.py:  PUT  /post/post-image          (upload a post image)
    - feed.py:    GET  /feed/posts               (page of posts)
                  POST /feed/post                (create)
                  GET|PUT|DELETE /feed/post/{id} (read, update, delete)
    - health.py:  GET  /health                   (service health check)

The GraphQL endpoint lives in postboard/graphql/router.py.

Routes stay thin: extract input, call a service, shape the response.
Domain errors propagate to the exception handlers in main.py.
"""
