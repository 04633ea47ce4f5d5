"""Migration modules, applied in VERSION order"""
