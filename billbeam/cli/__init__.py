"""Unified command-line interface for BillBeam.

Usage:
    billbeam serve [--host] [--port]
    billbeam split <image> --people Ana Ben [--equal] [--round] [--share]
    billbeam history --user <id>
    billbeam groups --user <id>
"""
