from dotenv import load_dotenv
from homesite import create_app

load_dotenv()
app = create_app('production')
