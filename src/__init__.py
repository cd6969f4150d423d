"""Layoffs data cleaning pipeline."""
