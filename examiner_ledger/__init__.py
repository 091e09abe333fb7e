"""Moderator activity and verification-queue analysis for speedrun.com leaderboards."""

__version__ = "1.0.0"
