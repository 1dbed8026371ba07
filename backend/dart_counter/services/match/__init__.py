"""Live match domain: turn processing, legs, statistics, bot and undo.

This package holds the match state machine. HTTP routes and socket handlers
talk to it only through ``MatchSession``, keeping transport concerns
separated from the game rules.
"""
