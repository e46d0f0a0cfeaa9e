"""Shared test fixtures for the airdrop pipeline."""
