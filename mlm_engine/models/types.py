"""
Standard type definitions for database models.

Provides consistent types for monetary and percentage fields across all models.
"""

from sqlalchemy import DECIMAL

# Standard money type for order amounts and commissions
# Precision: 18 digits total, 2 after decimal point
# Range: up to 9,999,999,999,999,999.99
MoneyType = DECIMAL(18, 2)

# Percentage type for commission rates
# Precision: 7 digits total, 4 after decimal point
# Suitable for: level percentages (e.g., 5.0000%, 2.5000%)
# Range: 0.0000 to 999.9999
PercentType = DECIMAL(7, 4)
