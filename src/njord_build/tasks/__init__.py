"""Task modules live here.

Each module declares its tasks with `@orchestrator.task(name=..., deps=[...])`;
the CLI imports every module in this package and registers what it finds.

Keep one concern per module; shared helpers go next to the task that owns them.
"""
