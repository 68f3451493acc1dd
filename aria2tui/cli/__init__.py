"""
Command-line and terminal layer: the Typer entry point, the asyncio event loop
and the Rich screens.
"""
