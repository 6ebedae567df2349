"""SnowOps ticket service."""
