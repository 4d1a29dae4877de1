"""
Routers module - API endpoint handlers organized by feature.

Each router handles a specific domain of the API:
- chat: Natural language commands (/api/chat, /api/assistant)
- device: Device address, reachability and raw commands (/api/device)
"""
