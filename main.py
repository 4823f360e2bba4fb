import streamlit as st
import logging

# Import backend components
from backend.db import StateStore
from backend.models.contact import ContactKind
from backend.notifications import setup_logging
from backend.scheduler import ReminderScheduler
from backend.services.notification_service import NotificationDispatcher
from backend.utils.config import config

setup_logging(logging.INFO)


@st.cache_resource
def get_scheduler() -> ReminderScheduler:
    """One store, dispatcher and background scheduler per Streamlit server"""
    store = StateStore()
    scheduler = ReminderScheduler(store)
    scheduler.start()
    return scheduler


def initialize_app():
    """Initialize the Streamlit app"""
    st.set_page_config(
        page_title="Reminder Operations",
        page_icon="💗",
        layout="wide",
        initial_sidebar_state="expanded"
    )


def display_sidebar(scheduler: ReminderScheduler):
    """Display sidebar with system information"""
    with st.sidebar:
        st.header("🔧 System Status")

        missing = config.missing_channel_settings()
        if missing:
            st.error("❌ WhatsApp not configured")
            for name in missing:
                st.write(f"• {name}")
        else:
            st.success("✅ WhatsApp configured")

        if scheduler.store.is_available():
            st.success(f"✅ State store: {scheduler.store.db_path}")
        else:
            st.error(f"❌ State store: {scheduler.store.unavailable_reason}")

        st.header("⏰ Scheduler")
        st.write("🟢 Running" if scheduler.is_running else "🔴 Stopped")
        st.write(f"• Every {scheduler.interval_minutes:g} minutes")
        st.write(f"• Timezone: {config.CLINIC_TIMEZONE}")


def display_scan_panel(scheduler: ReminderScheduler):
    st.subheader("Run a scan now")
    col1, col2 = st.columns(2)

    with col1:
        if st.button("📅 Appointment reminders"):
            st.json(scheduler.appointment_scanner.scan())
    with col2:
        if st.button("💊 Medication reminders"):
            st.json(scheduler.medication_scanner.scan())


def display_send_panel(dispatcher: NotificationDispatcher):
    st.subheader("Send a message")
    tab1, tab2 = st.tabs(["Test message", "Custom message"])

    with tab1:
        phone = st.text_input("Phone number", key="test_phone")
        if st.button("Send test"):
            result = dispatcher.send_test_message(phone)
            if result.success:
                st.success(f"Sent: {result.message_id}")
            else:
                st.error(f"{result.error_kind}: {result.error}")

    with tab2:
        recipient = st.text_input("Recipient ID", key="custom_recipient")
        kind = st.selectbox("Recipient type", [k.value for k in ContactKind])
        text = st.text_area("Message")
        if st.button("Send message"):
            result = dispatcher.send_custom(recipient, ContactKind(kind), text)
            if result.success:
                st.success(f"Sent: {result.message_id}")
            else:
                st.error(f"{result.error_kind}: {result.error}")


def main():
    """Main application function"""
    initialize_app()
    scheduler = get_scheduler()

    st.title("💗 Reminder Operations")
    display_sidebar(scheduler)
    display_scan_panel(scheduler)
    st.markdown("---")
    display_send_panel(scheduler.dispatcher)


if __name__ == "__main__":
    main()
