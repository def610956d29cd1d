import os
import sys

# The serverless runtime executes this file from api/; the app lives one level up
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config import ProductionConfig
from taskflow import create_app, db

app = create_app(ProductionConfig)

# SQLite under /tmp starts empty on every cold start
with app.app_context():
    db.create_all()

# Vercel entry point
application = app

if __name__ == '__main__':
    app.run(debug=True)
