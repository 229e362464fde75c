"""
Blagues pour !joke (liste statique, l'index est tiré par le dispatcher)
"""

JOKES = (
    "Why did the video player go to therapy? It had too many unresolved buffering issues.",
    "I told my playlist a joke. It didn't get it, it was on shuffle.",
    "Why don't subtitles ever win arguments? They always arrive a little late.",
    "What did the speaker say to the microphone? Stop repeating everything I say!",
    "I paused my movie to make popcorn. Now the popcorn is the only thing with a plot twist.",
    "Why was the codec so calm? It knew how to compress its feelings.",
    "My volume knob and I have a lot in common: we both go to eleven under pressure.",
    "Why did the frame drop out of school? It couldn't keep up with the rate.",
    "I asked the seek bar for directions. It just kept jumping to conclusions.",
    "Why do audio tracks make terrible spies? They always get picked up.",
    "The director said to rewind ten seconds. Now I'm ten seconds younger and still confused.",
    "What do you call a movie with no ending? A series.",
)
