"""EV3 UART sensor protocol message generator with an MCP server front end."""

__version__ = "0.1.0"
