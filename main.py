"""
Entry point script for the ask_gemini application.
This allows running the app directly from the project root.
"""
from ask_gemini.main import main

if __name__ == "__main__":
    main()
