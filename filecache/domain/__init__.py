"""Domain layer: value objects, errors and the ports the cache is built on."""
