"""Core adapter: batching, writer and reader loops, group coordination."""
