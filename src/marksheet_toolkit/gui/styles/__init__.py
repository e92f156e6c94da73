"""Colours, fonts and stylesheets for the bulk generator window."""
