"""Adapters connecting the seeder to concrete persistence stacks."""
