"""Cogs package - Discord command modules"""
