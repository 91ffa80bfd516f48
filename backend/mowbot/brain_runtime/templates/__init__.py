"""
Brain templates for MowBot.

Starter scripts that show the brain API. Each one is plain source text
that can be deployed as-is.
"""

from pathlib import Path

# Template metadata for the brain endpoints
TEMPLATES = [
    {
        "id": "hello_brain",
        "name": "Hello Brain",
        "difficulty": 1,
        "description": "Drives in a slow circle and reports its pose. The smallest useful brain.",
        "features": ["init/step", "Console", "Watches"],
        "file": "hello_brain.py"
    },
    {
        "id": "obstacle_avoider",
        "name": "Obstacle Avoider",
        "difficulty": 2,
        "description": "Wanders the field, turning away from obstacles and backing out of water.",
        "features": ["Front distance sensor", "Ground classification", "Telemetry log"],
        "file": "obstacle_avoider.py"
    },
    {
        "id": "coverage_mower",
        "name": "Coverage Mower",
        "difficulty": 3,
        "description": "Plans a boustrophedon path over the mowing zone and follows it waypoint by waypoint.",
        "features": ["Coverage planner", "Waypoint following", "Debug path overlay"],
        "file": "coverage_mower.py"
    },
]


def get_template_list():
    """
    Get list of available templates.

    Returns:
        list: Template metadata dictionaries
    """
    return TEMPLATES


def get_template_code(template_id: str) -> str:
    """
    Get the source code for a template brain.

    Args:
        template_id: Template identifier (e.g., "coverage_mower")

    Returns:
        str: Template source code

    Raises:
        ValueError: If template_id is not found
    """
    template = next((t for t in TEMPLATES if t["id"] == template_id), None)
    if not template:
        raise ValueError(f"Template '{template_id}' not found")

    return (Path(__file__).parent / template["file"]).read_text()
