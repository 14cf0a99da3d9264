"""Style resolution: models, layered merge, record stores, resolvers and CSS synthesis."""
