"""
Run the Capture Fisheries Dashboard.

    python app.py [--data data/proj.csv] [--geojson URL_OR_PATH] [--port 8050]
"""

from fishery_dashboard.cli import main


# ======================
# Main
# ======================

if __name__ == "__main__":
    main()
