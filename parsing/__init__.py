"""Parsing package - the message interpretation pipeline

text_normalizer -> hints -> team_resolver / temporal -> week_resolver -> pairs
"""
