"""Core model: fatigue engine, progression advisor, recovery utilities."""
