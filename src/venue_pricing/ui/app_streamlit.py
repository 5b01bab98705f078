"""
Streamlit UI for venue pricing.

Features:
- Live price preview with tax/fee checkboxes
- Quotes for stored packages and services (fixed or per-person)
- Tax settings overview
"""
import streamlit as st
import pandas as pd
import sys
from pathlib import Path
from datetime import datetime

# Add src to path for imports
src_path = Path(__file__).parent.parent.parent
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from venue_pricing.config.settings import get_settings
from venue_pricing.engine import DefinitionKind, TaxFeeSelection
from venue_pricing.services.catalog_store import CatalogStore


st.set_page_config(
    page_title="Venue Pricing",
    layout="wide",
    initial_sidebar_state="expanded"
)


@st.cache_resource
def get_store():
    """Get cached store instance."""
    return CatalogStore(get_settings())


try:
    store = get_store()
    settings = store.settings
except Exception as e:
    st.error(f"System Error: {e}")
    st.stop()


def render_breakdown(breakdown):
    """Itemized list: Base Price, + fees, + taxes, then a bold Total Price."""
    rows = breakdown.to_display_rows(settings.currency_symbol, settings.display_places)
    for label, amount in rows[:-1]:
        c1, c2 = st.columns([3, 1])
        c1.write(label)
        c2.write(amount)
    st.divider()
    label, amount = rows[-1]
    c1, c2 = st.columns([3, 1])
    c1.markdown(f"**{label}**")
    c2.markdown(f"**{amount}**")
    for warning in breakdown.warnings:
        st.warning(warning)


# ============================================================================
# SIDEBAR: Tax Settings
# ============================================================================
with st.sidebar:
    st.header("🧾 Tax Settings")
    definitions = store.list_definitions()
    active = [d for d in definitions if d.is_active]
    st.metric("Active", f"{len(active)} / {len(definitions)}")
    for d in active:
        st.caption(f"**{d.name}** · {d.kind.label} · {d.describe_rate(settings.currency_symbol)}")


st.title("Venue Pricing")
st.caption(f"Tax & fee calculator | {datetime.now().strftime('%Y-%m-%d')}")

tab1, tab2, tab3 = st.tabs(["⚡ Price Preview", "📦 Catalog Quotes", "🔧 Tax Settings"])


# ============================================================================
# TAB 1: LIVE PREVIEW
# ============================================================================
with tab1:
    if 'selection' not in st.session_state:
        st.session_state.selection = TaxFeeSelection()
    selection = st.session_state.selection

    col1, col2 = st.columns([1.5, 1.2], gap="large")

    with col1:
        with st.container(border=True):
            base_price_text = st.text_input("Base Price", value="", placeholder="0.00")

            st.markdown("##### Apply Taxes & Fees")
            fee_defs = store.selectable_definitions(DefinitionKind.FEE)
            tax_defs = store.selectable_definitions(DefinitionKind.TAX)
            for d in fee_defs + tax_defs:
                checked = st.checkbox(
                    f"{d.name} ({d.kind.label} • {d.describe_rate(settings.currency_symbol)})",
                    value=selection.is_enabled(d),
                    key=f"sel_{d.id}",
                )
                selection.set_enabled(d, checked)

    with col2:
        st.subheader("Price Breakdown")
        with st.container(border=True):
            breakdown = selection.breakdown(base_price_text, definitions)
            render_breakdown(breakdown)

        with st.expander("🔍 Calculation Details"):
            st.text(breakdown.get_trace_text())


# ============================================================================
# TAB 2: CATALOG QUOTES
# ============================================================================
with tab2:
    collection = st.radio("Collection", ["packages", "services"], horizontal=True)
    items = store.list_items(collection, include_inactive=False)

    if not items:
        st.info(f"No active {collection}.")
    else:
        labels = {f"{i.name} ({i.pricing_model})": i for i in items}
        choice = st.selectbox("Item", list(labels.keys()))
        item = labels[choice]

        guest_count = 1
        if item.pricing_model == 'per_person':
            guest_count = st.number_input("Guests", min_value=0, value=1, step=1)

        with st.container(border=True):
            render_breakdown(store.quote_item(collection, item.id, guest_count=guest_count))

        st.dataframe(
            pd.DataFrame([i.to_dict() for i in items]),
            use_container_width=True,
            hide_index=True,
        )


# ============================================================================
# TAB 3: TAX SETTINGS
# ============================================================================
with tab3:
    st.subheader("🔧 Tax Settings")
    if definitions:
        st.dataframe(
            pd.DataFrame([d.to_dict() for d in definitions]),
            use_container_width=True,
            hide_index=True,
        )
    else:
        st.info("No tax settings configured. Run scripts/seed_catalog.py to load samples.")

    stats = store.get_stats()
    c1, c2, c3 = st.columns(3)
    c1.metric("Tax Settings", stats['tax_settings'])
    c2.metric("Packages", stats['packages'])
    c3.metric("Services", stats['services'])
