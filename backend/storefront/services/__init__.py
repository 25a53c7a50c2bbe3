"""
Service Layer - Business operations spanning several repositories

Author: Taksha Engineering
Date: 2025-10-17
"""
