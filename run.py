# run.py
import os
import logging

from dotenv import load_dotenv

# 이 파일이 있는 디렉터리의 '.env' 파일을 앱 생성 전에 로드합니다.
basedir = os.path.abspath(os.path.dirname(__file__))
load_dotenv(dotenv_path=os.path.join(basedir, '.env'))

from postboard import create_app  # noqa: E402  (.env 로드 이후에 설정을 읽어야 합니다)

app = create_app()

if __name__ == '__main__':
    host = os.getenv('FLASK_RUN_HOST', '127.0.0.1')
    port = int(os.getenv('FLASK_RUN_PORT', 5000))
    debug = app.config.get('DEBUG', False)
    logging.info(f"Starting postboard on {host}:{port} (debug={debug})")
    app.run(host=host, port=port, debug=debug)
