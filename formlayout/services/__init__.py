"""Layout services: lookup, layout-sets, context building and loading."""
