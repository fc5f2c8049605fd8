"""Companion client for the YouTube chatbot.

Plays the role of the browser extension: a page watcher that tracks the
current video, a background worker that talks to the backend and keeps
local state, and a terminal chat popup.
"""
