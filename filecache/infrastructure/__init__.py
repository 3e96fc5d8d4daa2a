"""Infrastructure Layer: concrete adapters for the domain interfaces."""
