"""
Date Filing Processors

Per-event steps of the filing pipeline:
- stability.py - Wait until the writer has released a new file
- mover.py - Collision-free move into the dated folder, with retries
- pipeline.py - Gate -> resolver -> mover for a single event
"""
