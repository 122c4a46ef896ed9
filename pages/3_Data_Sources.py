import pandas as pd
import streamlit as st

from config.registry import DATASETS, get_dataset_url
from data.loader import reset_loader_cache
from service.session import reset_session_data
from utils.broadway_client import clear_cache, get_cache_info

st.set_page_config(page_title="Data Sources", page_icon="🎭", layout="wide")
st.title("Data Sources & Local Cache")

st.markdown("""
### What is this page?
Both datasets are downloaded once and kept as local cache files. Later runs
read the cache and never touch the network.

If a cache file becomes unreadable, clear it here; the next page load
downloads a fresh copy.
""")

info = get_cache_info()
rows = []
for name, meta in DATASETS.items():
    cache = info[name]
    rows.append({
        "dataset": name,
        "description": meta["description"],
        "url": get_dataset_url(name),
        "cached": "✓" if cache["exists"] else "–",
        "size (KB)": round(cache["size_bytes"] / 1024, 1),
        "cached at (UTC)": cache["modified"],
    })

st.dataframe(pd.DataFrame(rows), width="stretch", hide_index=True)

if st.button("🗑️ Clear cache"):
    removed = clear_cache()
    reset_loader_cache()
    reset_session_data()
    if removed:
        st.success(f"Removed {len(removed)} cache file(s). Data will be downloaded on the next load.")
    else:
        st.info("Nothing to clear.")
