"""Startup data flow, selection state and Streamlit session helpers."""
