"""Core pricing, auction state and settlement"""
