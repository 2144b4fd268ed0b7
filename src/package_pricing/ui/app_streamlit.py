"""
Streamlit UI for package price previews.

Features:
- Package editor with personalized price, base hours and event duration
- Item picker backed by the configured catalog
- Resolved price with its source, line breakdown and resolution trace
"""
import streamlit as st
import pandas as pd
import sys
from pathlib import Path

# Add src to path for imports
src_path = Path(__file__).parent.parent.parent
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from package_pricing.engine import PackagePriceEngine, Package, PricingError
from package_pricing.config.settings import get_settings
from package_pricing.data.load_catalog import (
    load_catalog,
    load_price_config,
    catalog_to_dataframe,
    line_items_from_catalog,
)
from package_pricing.pricing.rounding import STRATEGIES, format_price


st.set_page_config(
    page_title="Package Pricing",
    layout="wide",
    initial_sidebar_state="expanded"
)


@st.cache_resource
def get_settings_cached():
    """Get cached settings."""
    return get_settings()


@st.cache_resource
def get_catalog(path: str):
    """Get the cached catalog tree, read once per file path."""
    return load_catalog(Path(path))


@st.cache_data
def get_catalog_frame(path: str) -> pd.DataFrame:
    """Get the catalog as a flat frame."""
    return catalog_to_dataframe(get_catalog(path))


try:
    settings = get_settings_cached()
    catalog = get_catalog(str(settings.catalog_csv))
    catalog_df = get_catalog_frame(str(settings.catalog_csv))
    if settings.price_config_json is not None:
        config = load_price_config(settings.price_config_json, fallback=settings.default_price_config())
    else:
        config = settings.default_price_config()
except Exception as e:
    st.error(f"System Error: {e}")
    st.stop()


# ============================================================================
# SIDEBAR: Package Configuration
# ============================================================================
with st.sidebar:
    st.header("📦 Package")

    with st.container(border=True):
        package_id = st.text_input("Package ID", value="package-1")
        personalized_price = st.number_input("Personalized Price (0 = unset)", min_value=0.0, value=0.0, step=100.0)
        base_hours = st.number_input("Base Hours (0 = unset)", min_value=0.0, value=0.0, step=0.5)

    st.header("📅 Event")
    duration_hours = st.number_input("Event Duration (hours, 0 = unset)", min_value=0.0, value=0.0, step=0.5)

    st.divider()
    strategy_names = list(STRATEGIES)
    rounding_strategy = st.selectbox(
        "Rounding Strategy",
        strategy_names,
        index=strategy_names.index(settings.rounding_strategy) if settings.rounding_strategy in strategy_names else 0,
    )

    with st.expander("⚙️ Margin Configuration"):
        for key, value in config.to_dict().items():
            st.caption(f"**{key}**: {value:.0%}")


# ============================================================================
# MAIN CONTENT
# ============================================================================
st.title("Package Pricing")

col1, col2 = st.columns([1.6, 1.4], gap="large")

with col1:
    st.subheader("Items")
    editor_df = catalog_df[['item_id', 'name', 'section', 'category', 'billing_type', 'cost', 'expense']].copy()
    editor_df.insert(0, 'quantity', 0)
    edited = st.data_editor(
        editor_df,
        hide_index=True,
        disabled=['item_id', 'name', 'section', 'category', 'billing_type', 'cost', 'expense'],
        column_config={"quantity": st.column_config.NumberColumn("Qty", min_value=0, step=1)},
        use_container_width=True,
    )

quantities = {
    row.item_id: int(row.quantity)
    for row in edited.itertuples(index=False)
    if row.quantity and row.quantity > 0
}

with col2:
    st.subheader("Price")
    if not quantities and personalized_price <= 0:
        st.info("Add items or set a personalized price.")
    else:
        try:
            engine = PackagePriceEngine(rounding_strategy=rounding_strategy)
            result = engine.price(
                Package(id=package_id, personalized_price=personalized_price, base_hours=base_hours),
                duration_hours,
                line_items_from_catalog(catalog, quantities),
                catalog,
                config,
            )
        except PricingError as e:
            st.error(f"Unable to compute price: {e}")
            st.stop()

        m1, m2 = st.columns(2)
        m1.metric("Final Price", format_price(result.final_price))
        m2.metric("Source", result.price_source.title())

        if result.recalculated_price is not None:
            st.caption(f"Recalculated before rounding: {format_price(result.recalculated_price, decimals=2)}")
        st.caption(f"Hours match: {'yes' if result.hours_match else 'no'}")

        for warning in result.warnings:
            st.warning(warning)

        if result.lines:
            st.dataframe(pd.DataFrame([line.__dict__ for line in result.lines]), hide_index=True)

        with st.expander("🔍 Resolution Details"):
            for t in result.trace:
                if t.value:
                    st.caption(f"**{t.step}**: {t.description} = `{t.value}`")
                else:
                    st.caption(f"**{t.step}**: {t.description}")
