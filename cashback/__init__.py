"""Cashback tracker: cards, their cashback categories and the change history."""
