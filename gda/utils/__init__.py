"""Shared utilities (logging, input validation)"""
