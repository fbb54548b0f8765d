from __future__ import annotations

import os

from eventhubs_control.webapp import create_app

if __name__ == "__main__":
    app = create_app(os.getenv("EVENTHUBS_CONTROL_CONFIG"))
    app.run(host="0.0.0.0", port=int(os.getenv("PORT", 5000)), debug=os.getenv("FLASK_DEBUG") == "1")
