"""
Core application engine.

This package contains the interactive logic. The `NavigationStateMachine` routes
every key event, delegating edits to the `ConfigStore` and turning the options
into an aria2c command line with `build_arguments`.
"""
