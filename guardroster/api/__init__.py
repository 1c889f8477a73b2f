"""HTTP transport: routers, dependencies and the route guard."""
