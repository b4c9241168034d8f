"""CLI module for walletbridge."""
