# GraphQL package init: schema, resolvers and the /graphql router
