"""Command-line interface for chatbot_fsm."""
