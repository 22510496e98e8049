import os

from dotenv import load_dotenv

load_dotenv(os.getenv('CIVICFEED_DOTENV', '.env'))

from app import configure_logging, create_app

if __name__ == '__main__':
    configure_logging()
    host = os.getenv('HOST', '127.0.0.1')
    port = int(os.getenv('PORT', 5000))
    debug = os.getenv('DEBUG', 'False').lower() == 'true'

    app = create_app()
    print(f"Starting civic-feed on {host}:{port}")
    print(f"Access URL: http://{host}:{port}/api/feed")

    app.run(host=host, port=port, debug=debug, threaded=True)
