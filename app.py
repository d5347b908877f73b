#!/usr/bin/env python3
"""
Print Agent - local print bridge
Accepts signed print jobs over HTTP on 127.0.0.1 and forwards ESC/POS data
to OS print queues or raw TCP printers.

Run directly:
    python app.py [--port 9100] [--store ./store.json]
"""

from print_agent.__main__ import main

if __name__ == "__main__":
    main()
