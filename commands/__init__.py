"""
Commands - Handlers des commandes chat (!play, !pause, !vol...)
"""
