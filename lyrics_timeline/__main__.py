from lyrics_timeline.cli import main

main()
