"""Interface adapters exposing the application services."""
