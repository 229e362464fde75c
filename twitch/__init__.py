"""
Twitch - Transport chat (IRC)
"""
