"""CineMan movie ticket booking API"""
