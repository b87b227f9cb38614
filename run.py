from campus_tours import create_app
import os

app = create_app(os.getenv('FLASK_CONFIG') or 'default')

if __name__ == '__main__':
    # Bind to localhost and skip the reloader so the display board and the
    # worker portal can share one dev server without port clashes.
    app.run(host='127.0.0.1', port=5001, debug=True, use_reloader=False)
