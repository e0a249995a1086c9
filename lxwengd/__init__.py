"""lxwengd - a wallpaper playlist daemon for linux-wallpaperengine.

Plays playlists (small scripts of wallpaper, sleep and control-flow
commands) by launching and supervising the renderer. Several playlists
can run concurrently, one runner each, and every runner is controllable
at runtime through a Unix socket. The daemon runs as an asyncio service.
"""
