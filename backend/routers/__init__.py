"""Parley HTTP routers."""
