"""JSON/JSONL persistence for workout history and fatigue state."""
