"""
Centralized constants for arbor.

Path grammar markers, the well-known script class name and the Rich styles
used when rendering node trees.
"""

# Prefix that re-roots a path at the top-level container
ROOT_PREFIX = ".Simulations"

# Public class every compiled script must define
SCRIPT_CLASS_NAME = "Script"

# Module namespace compiled scripts are registered under in sys.modules
SCRIPT_MODULE_PREFIX = "arbor_scripts"

SYMBOLS = {
    "zone": "🌾 ",
    "simulation": "▶ ",
    "script": "📜 ",
    "success": "[bold green]✓[/bold green] ",
    "error": "[bold red]![/bold red] ",
}

STYLE = {
    "header": "bold cyan",
    "node": "cyan",
    "zone": "bold green",
    "script": "magenta",
    "type": "dim",
    "error": "red",
    "success": "green",
}
