"""Database migrations for the housnkuh backend"""
