"""Core queue, storage and clipboard components"""
