from dotenv import load_dotenv
from homesite import create_app, db
from homesite.models import Post, Comment, Media, Danmaku


load_dotenv()

app = create_app()

@app.shell_context_processor
def make_shell_context():
    return {'db': db, 'Post': Post, 'Comment': Comment, 'Media': Media, 'Danmaku': Danmaku}

if __name__ == '__main__':
    app.run(debug=app.config.get('DEBUG', False))
