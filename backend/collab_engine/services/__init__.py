"""Collab Engine - Services"""
