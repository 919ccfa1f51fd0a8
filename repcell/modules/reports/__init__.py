"""
Reports module

Period summaries, top products and expenses by category, with CSV and PDF
exports.
"""
